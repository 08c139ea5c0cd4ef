"""Upload a PDF brief through the proxy and wait for the article link.

Usage::

    content-forge-upload brief.pdf --host http://127.0.0.1:8000
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from content_forge.client import ProxyClient, poll_until_done, submit_document
from content_forge.config import Settings, configure_logging
from content_forge.session import PDF_CONTENT_TYPE, Status, UploadSession


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="content-forge-upload", description=__doc__.splitlines()[0])
    p.add_argument("pdf", help="Path to the PDF brief")
    p.add_argument("--host", default="http://127.0.0.1:8000", help="Proxy base URL")
    p.add_argument("--timeout", type=float, default=settings.timeout_seconds, help="Upload timeout in seconds")
    p.add_argument("--interval", type=float, default=settings.poll_interval_seconds, help="Seconds between status polls")
    p.add_argument("--max-attempts", type=int, default=settings.poll_max_attempts, help="Status polls before giving up")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    args = build_parser(settings).parse_args(argv)
    configure_logging(settings.log_level)

    session = UploadSession(max_attempts=args.max_attempts)
    # Only the extension is known here; treat .pdf files as declared PDFs.
    content_type = PDF_CONTENT_TYPE if args.pdf.lower().endswith(".pdf") else None
    if not os.path.isfile(args.pdf):
        print(f"No such file: {args.pdf}", file=sys.stderr)
        return 2
    if not session.select_file(os.path.basename(args.pdf), os.path.getsize(args.pdf), content_type):
        print(session.error, file=sys.stderr)
        return 2

    client = ProxyClient(args.host, timeout=args.timeout)
    print(f"Uploading {args.pdf} -> {client.base_url}")
    with open(args.pdf, "rb") as f:
        submit_document(session, client, session.file_name, f)

    if session.status is Status.POLLING:
        print(f"Job {session.job_id} accepted, polling every {args.interval:g}s")
        poll_until_done(
            session,
            client,
            args.interval,
            on_tick=lambda s: print(f"  attempt {s.polling_attempts}: {s.status.value}"),
        )

    if session.status is Status.COMPLETED:
        print(session.result_link)
        return 0
    if session.status is Status.SUBMITTING:
        # A gateway timeout: the webhook keeps working and delivers on its own.
        print(session.error)
        return 0
    print(session.error, file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
