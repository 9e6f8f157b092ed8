#!/usr/bin/env python3
"""
Send a sample webhook to a running CB Dummy server.

Usage: python send_test_callback.py [path] [--host http://127.0.0.1:3000]
"""

import os
import json
import argparse
import requests
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

DEFAULT_HOST = f"http://127.0.0.1:{os.getenv('PORT', '3000')}"

# Payload to send
payload = {
    "event": "payment.completed",
    "data": {"order_id": "ORD-1001", "amount": 125.5, "currency": "USD"},
    "attempt": 1
}


def main():
    parser = argparse.ArgumentParser(description='Send a test callback to CB Dummy')
    parser.add_argument('path', nargs='?', default='/test', help='Callback path, e.g. /payments')
    parser.add_argument('--host', default=DEFAULT_HOST, help='Server base URL')
    parser.add_argument('--method', default='POST', help='HTTP method')
    args = parser.parse_args()

    path = args.path if args.path.startswith('/') else f"/{args.path}"
    url = f"{args.host.rstrip('/')}/callback{path}"

    resp = requests.request(
        args.method.upper(),
        url,
        params={"source": "send_test_callback"},
        headers={
            "Content-Type": "application/json",
            "X-Test-Event": payload["event"]
        },
        data=json.dumps(payload),
        timeout=10
    )

    print("URL:", url)
    print("Status:", resp.status_code)
    try:
        print("Response:", resp.json())
    except ValueError:
        print("Response:", resp.text)


if __name__ == '__main__':
    main()
