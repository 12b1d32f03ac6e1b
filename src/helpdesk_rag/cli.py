"""Command-line entry point — ingest a PDF, ask a question, or run the API.

Usage
-----
    helpdesk-rag ingest handbook.pdf --title "HR Policy"
    helpdesk-rag ask "How many vacation days do I get?"
    helpdesk-rag serve --port 8080
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from helpdesk_rag.config import configure_logging
from helpdesk_rag.errors import HelpdeskError

logger = logging.getLogger(__name__)


def _cmd_ingest(args: argparse.Namespace) -> int:
    from helpdesk_rag.ingestion.loader import read_pages
    from helpdesk_rag.serving.dependencies import get_ingestion_pipeline

    path = Path(args.path)
    pages = read_pages(path.read_bytes())
    summary = get_ingestion_pipeline().ingest(pages, args.title or path.stem)
    print(json.dumps(summary.model_dump(), indent=2))
    return 0


def _cmd_ask(args: argparse.Namespace) -> int:
    from helpdesk_rag.serving.dependencies import get_query_pipeline

    answer = get_query_pipeline().answer(args.question)
    print(answer.text)
    for citation in answer.citations:
        print(f"  {citation.short_ref()} score={citation.score:.3f}")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("helpdesk_rag.serving.app:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="helpdesk-rag", description="Cited question answering over PDFs")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Index a PDF file")
    ingest.add_argument("path", help="Path to the PDF")
    ingest.add_argument("--title", default=None, help="Document title (defaults to the file name)")
    ingest.set_defaults(func=_cmd_ingest)

    ask = sub.add_parser("ask", help="Ask a question against the indexed documents")
    ask.add_argument("question")
    ask.set_defaults(func=_cmd_ask)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except HelpdeskError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
