#!/usr/bin/env python3
"""
Banking Demo Entry Point

Starts the FastAPI server (port 3000 by default) with the banking demo.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from banking_demo.api import run_server
from banking_demo.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("🏦 Starting Banking Telemetry Demo...")
    print(f"📡 Telemetry sinks: {', '.join(config.sink_names)}")
    if config.hec_configured:
        print(f"📨 Event collector: {config.hec_endpoint}")
    else:
        print("📨 Event collector not configured, console logging only")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\n👋 Shutting down Banking Telemetry Demo...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
