#!/usr/bin/env python3
"""
Check that the configured HTTP Event Collector accepts events.

Reads SPLUNK_HEC_ENDPOINT / SPLUNK_HEC_TOKEN (or .env) and sends one
connection-test event.
"""

import sys

from banking_demo.config import get_config
from banking_demo.hec_client import HecClient, InlineDelivery


def main() -> int:
    config = get_config()
    if not config.hec_configured:
        print("❌ Missing SPLUNK_HEC_ENDPOINT or SPLUNK_HEC_TOKEN (environment or .env)")
        return 1

    client = HecClient.from_config(config, delivery=InlineDelivery())
    print("🧪 Testing event collector connection...")
    print(f"📡 Endpoint: {client.endpoint}")
    print(f"🔑 Token: {client.masked_token()}")
    if not client.verify_tls:
        print("⚠️  TLS certificate verification disabled")

    try:
        ok = client.health_check()
    finally:
        client.close()

    if ok:
        print("\n✅ SUCCESS! The event collector accepted the test event.")
        print(f"   Search for: source=\"{config.app_name}-test\"")
        return 0

    print("\n❌ Connection failed. Check the endpoint, token and that the collector is enabled.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
