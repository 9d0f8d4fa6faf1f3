"""bluffy command line.

Usage:
    bluffy process -f notes.md -o out -w 2
    bluffy serve out/notes_embeddings.db --port 8080
"""

import argparse
import asyncio
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bluffy",
        description="Embed and summarise the paragraphs of a document and explore how they relate",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a document into ./out/notes_embeddings.db with 2 workers per batch
  bluffy process -f notes.md -o out -w 2

  # Use a remote Ollama instance
  bluffy process -f notes.md --host http://gpu-box:11434

  # Serve the result to the visualizer
  bluffy serve out/notes_embeddings.db --port 8080
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Chunk, embed and summarise a text file into a SQLite store")
    process.add_argument("-f", "--file", required=True, help="Input text file (.txt or .md)")
    process.add_argument("-o", "--output", default=".", help="Output directory for the SQLite database (default: .)")
    process.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Concurrent workers per batch; 0 means one per CPU (default: LLM_EMBED_WORKERS / LLM_SUMMARY_WORKERS)",
    )
    process.add_argument("--host", default=None, help="Ollama address (default: LLM_OLLAMA_BASE_URL or http://localhost:11434)")

    serve = subparsers.add_parser("serve", help="Serve a processed SQLite store over HTTP")
    serve.add_argument("db_path", help="SQLite database produced by 'bluffy process'")
    serve.add_argument("--port", type=int, default=8080, help="Server port (default: 8080)")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "process":
        from services.chunk_graph.chunk_graph_runner import main as run_pipeline

        return asyncio.run(run_pipeline(args.file, args.output, workers=args.workers, host=args.host))

    if not Path(args.db_path).is_file():
        print(f"Error: database file not found: {args.db_path}", file=sys.stderr)
        return 1

    from server.api_server import main as run_server

    run_server(store_path=args.db_path, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
