"""
Command-line client for the Face Portal proxy.

Sends the same requests the browser portal does: register and recognize
with a multipart image upload, list and delete-by-name with the identity
token in the X-Portal-UID header.

    face-portal-client register --uid device-1 --name Ann photo.jpg
    face-portal-client recognize --uid device-1 photo.jpg --output reply.mp3
    face-portal-client list --uid device-1
    face-portal-client delete --uid device-1 --name Ann
"""
import argparse
import json
import mimetypes
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:8004/api/proxy"
REQUEST_TIMEOUT = 60


@dataclass
class PortalResult:
    status_code: int
    content_type: Optional[str]
    body: Any
    headers: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_binary(self) -> bool:
        return isinstance(self.body, bytes)


def to_result(response: requests.Response) -> PortalResult:
    content_type = response.headers.get("Content-Type")
    if content_type and "json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = response.text
    elif content_type and content_type.startswith("text/"):
        body = response.text
    else:
        body = response.content

    return PortalResult(
        status_code=response.status_code,
        content_type=content_type,
        body=body,
        headers={
            "result_code": response.headers.get("Result"),
            "response_type": response.headers.get("X-Response-Type"),
            "response_text": response.headers.get("X-Response-Text"),
        },
    )


class PortalClient:

    def __init__(self, base_url: str = DEFAULT_API_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _image_file(self, image_path):
        path = Path(image_path)
        content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        return {"image": (path.name, path.read_bytes(), content_type)}

    def register(self, uid: str, name: str, image_path) -> PortalResult:
        response = self.session.post(
            f"{self.base_url}/register",
            data={"uid": uid.strip(), "name": name.strip()},
            files=self._image_file(image_path),
            timeout=REQUEST_TIMEOUT,
        )
        return to_result(response)

    def recognize(self, uid: str, image_path) -> PortalResult:
        response = self.session.post(
            f"{self.base_url}/recognize",
            data={"uid": uid.strip()},
            files=self._image_file(image_path),
            timeout=REQUEST_TIMEOUT,
        )
        return to_result(response)

    def list_faces(self, uid: str) -> PortalResult:
        response = self.session.get(
            f"{self.base_url}/faces/list",
            headers={"X-Portal-UID": uid.strip()},
            timeout=REQUEST_TIMEOUT,
        )
        return to_result(response)

    def delete_by_name(self, uid: str, name: str) -> PortalResult:
        response = self.session.delete(
            f"{self.base_url}/faces/deletebyname",
            headers={"X-Portal-UID": uid.strip()},
            json={"name": name.strip()},
            timeout=REQUEST_TIMEOUT,
        )
        return to_result(response)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="face-portal-client", description="Face Portal proxy client")
    parser.add_argument("--api-url", default=None, help="Proxy base URL (default: $PORTAL_API_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Register a face under a name")
    register.add_argument("--uid", required=True)
    register.add_argument("--name", required=True)
    register.add_argument("image")

    recognize = sub.add_parser("recognize", help="Recognize the face in an image")
    recognize.add_argument("--uid", required=True)
    recognize.add_argument("--output", help="Where to write a binary (e.g. audio) reply")
    recognize.add_argument("image")

    list_cmd = sub.add_parser("list", help="List registered face entries")
    list_cmd.add_argument("--uid", required=True)

    delete = sub.add_parser("delete", help="Delete every entry registered under a name")
    delete.add_argument("--uid", required=True)
    delete.add_argument("--name", required=True)

    return parser


def print_result(result: PortalResult, output: Optional[str] = None):
    print(f"Status: {result.status_code} ({result.content_type or 'no content type'})")
    for label, value in result.headers.items():
        if value:
            print(f"{label}: {value}")

    if result.is_binary:
        if output:
            Path(output).write_bytes(result.body)
            print(f"Wrote {len(result.body)} bytes to {output}")
        else:
            print(f"Binary reply of {len(result.body)} bytes (use --output to save it)")
    elif isinstance(result.body, (dict, list)):
        print(json.dumps(result.body, indent=2, ensure_ascii=False))
    elif result.body:
        print(result.body)


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    client = PortalClient(args.api_url or os.getenv("PORTAL_API_URL", DEFAULT_API_URL))

    try:
        if args.command == "register":
            result = client.register(args.uid, args.name, args.image)
        elif args.command == "recognize":
            result = client.recognize(args.uid, args.image)
        elif args.command == "list":
            result = client.list_faces(args.uid)
        else:
            result = client.delete_by_name(args.uid, args.name)
    except requests.exceptions.RequestException as e:
        print(f"API Error: {str(e)}", file=sys.stderr)
        return 2

    print_result(result, getattr(args, "output", None))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
