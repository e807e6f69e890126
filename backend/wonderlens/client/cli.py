"""Command line front end: scan an object and read its learning cards."""

import argparse
import json
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..inference.prompts import UNRECOGNIZED_OBJECT
from .api import WonderLensAPIError, WonderLensClient

GENERIC_FAILURE = "Failed to analyze image. Please try again."


def render_learning_cards(data: Dict[str, Any]) -> str:
    """Render learning data as numbered text cards."""
    if data.get("object") == UNRECOGNIZED_OBJECT:
        return data.get("message", "")
    if "lenses" not in data:
        return GENERIC_FAILURE

    lines = [f"🔎 {data.get('object', 'Something interesting')}", ""]
    lenses: List[Dict[str, Any]] = data.get("lenses") or []
    for i, lens in enumerate(lenses, start=1):
        lines.append(f"[{i}/{len(lenses)}] {lens.get('name', '')}")
        lines.append(f"    {lens.get('text', '')}")
    return "\n".join(lines)


def render_history(items: List[Dict[str, Any]]) -> str:
    if not items:
        return "No scans yet."
    lines = []
    for item in items:
        when = datetime.fromtimestamp(item["timestamp"] / 1000).strftime("%Y-%m-%d %H:%M")
        obj = (item.get("learningData") or {}).get("object", "?")
        lines.append(f"{item['id']}  {when}  {obj}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wonderlens", description="WonderLens AI command line client.")
    parser.add_argument("--backend-url", default=None, help="Backend base URL.")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan an image file.")
    scan.add_argument("path")
    scan.add_argument("--age", type=int, default=8)
    scan.add_argument("--country", default="global")
    scan.add_argument("--json", action="store_true", help="Print the raw learning data.")

    news = sub.add_parser("news", help="Show today's kid news.")
    news.add_argument("--age", type=int, default=8)
    news.add_argument("--country", default="global")

    quiz = sub.add_parser("quiz", help="Show a quiz pack.")
    quiz.add_argument("category")
    quiz.add_argument("--age", type=int, default=8)

    sub.add_parser("history", help="List this device's scans.")

    delete = sub.add_parser("delete", help="Delete one of this device's scans.")
    delete.add_argument("scan_id")

    community = sub.add_parser("community", help="List recent community scans.")
    community.add_argument("--limit", type=int, default=20)
    community.add_argument("--age", type=int, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    with WonderLensClient(base_url=args.backend_url) as client:
        try:
            if args.command == "scan":
                data = client.analyze_image(args.path, child_age=args.age, child_country=args.country)
                print(json.dumps(data, indent=2, ensure_ascii=False) if args.json else render_learning_cards(data))
            elif args.command == "news":
                print(json.dumps(client.get_kid_news(args.country, args.age), indent=2, ensure_ascii=False))
            elif args.command == "quiz":
                print(json.dumps(client.get_quiz(args.category, args.age), indent=2, ensure_ascii=False))
            elif args.command == "history":
                print(render_history(client.get_history()))
            elif args.command == "delete":
                print(client.delete_scan(args.scan_id).get("message", ""))
            elif args.command == "community":
                print(render_history(client.get_community(limit=args.limit, age=args.age)))
        except WonderLensAPIError as e:
            print(GENERIC_FAILURE if args.command == "scan" else f"Error: {e.message}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
