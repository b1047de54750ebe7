#!/usr/bin/env python
"""
Drive the feedback flow of a running server without a real WhatsApp account

Usage:
  python scripts/simulate.py --phone 15551234567 --text hi
  python scripts/simulate.py --phone 15551234567 --image img-42
  python scripts/simulate.py --phone 15551234567 --walkthrough
  python scripts/simulate.py --stats
"""

import sys
import json
import argparse
from typing import Any, Dict

import httpx


def setup_arg_parser():
    parser = argparse.ArgumentParser(
        description="Send simulated WhatsApp messages to the feedback bot"
    )
    parser.add_argument(
        "--base-url", default="http://127.0.0.1:8000", help="Server base URL"
    )
    parser.add_argument("--phone", help="Phone number to simulate")
    parser.add_argument("--text", help="Text message to send")
    parser.add_argument("--image", help="Image ID to send")
    parser.add_argument(
        "--walkthrough",
        action="store_true",
        help="Run a complete conversation: hi, name, feedback, image",
    )
    parser.add_argument("--stats", action="store_true", help="Show session stats")
    return parser


def post(client: httpx.Client, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
    response = client.post(path, json=body)
    response.raise_for_status()
    return response.json()


def send_text(client: httpx.Client, phone: str, text: str) -> Dict[str, Any]:
    return post(client, "/api/test/message", {"message": text, "phone_number": phone})


def send_image(client: httpx.Client, phone: str, image_id: str) -> Dict[str, Any]:
    return post(client, "/api/test/image", {"phone_number": phone, "image_id": image_id})


def walkthrough(client: httpx.Client, phone: str) -> None:
    for text in ("hi", "Test User", "Everything worked nicely."):
        print(json.dumps(send_text(client, phone, text), indent=2))
    print(json.dumps(send_image(client, phone, "test-image-123"), indent=2))


def main():
    parser = setup_arg_parser()
    args = parser.parse_args()

    needs_phone = args.text or args.image or args.walkthrough
    if needs_phone and not args.phone:
        parser.error("--phone is required to send messages")
    if not (needs_phone or args.stats):
        parser.print_help()
        return 1

    with httpx.Client(base_url=args.base_url, timeout=10.0) as client:
        try:
            if args.walkthrough:
                walkthrough(client, args.phone)
            if args.text:
                print(json.dumps(send_text(client, args.phone, args.text), indent=2))
            if args.image:
                print(json.dumps(send_image(client, args.phone, args.image), indent=2))
            if args.stats:
                response = client.get("/api/sessions/stats")
                response.raise_for_status()
                print(json.dumps(response.json(), indent=2))
        except httpx.HTTPError as e:
            print(f"Request failed: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
