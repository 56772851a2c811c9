# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

import argparse, os, sys

# ---------------- Local Project ----------------
from literanova.client.messenger import Messenger
from literanova.storage.repository import MessageRepository
from literanova.storage.store import PersistentStore
from literanova.utils import config as CFG
from literanova.utils.helpers import print_banner
from literanova.utils.nova_logging import setup_logging, get_ctx_logger
from literanova.wallet.address import short_addr
from literanova.wallet.keystore import load_or_create_signer_key
from literanova.wallet.resolver import IdentifierResolver, default_endpoints
from literanova.wallet.signer import LocalSigner

log = get_ctx_logger("apps.literanova_cli")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="LiteraNova address-based messaging (CLI)")
    parser.add_argument("--password", help="Password of the local signing key (or LITERANOVA_PASSWORD)")
    parser.add_argument("--backend", choices=("json", "lmdb"), default=CFG.KV_BACKEND, help="Storage backend")
    parser.add_argument("--rpc", action="append", help="ENS RPC endpoint, repeatable, tried in order")
    parser.add_argument("--quiet", action="store_true", help="Do not print the banner")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("whoami", help="Show the local account")
    sub.add_parser("unlock", help="Sign the unlock message (valid 12h)")
    sub.add_parser("lock", help="Drop the current session")

    p = sub.add_parser("resolve", help="Resolve a 0x address or ENS name")
    p.add_argument("raw")

    p = sub.add_parser("send", help="Start a new thread")
    p.add_argument("to")
    p.add_argument("body")
    p.add_argument("--certified", action="store_true", help="Mark the message as certified")
    p.add_argument("--attach", metavar="PDF", help="Attach a PDF (max 5 MB)")

    p = sub.add_parser("reply", help="Reply in an existing thread")
    p.add_argument("thread")
    p.add_argument("body")
    p.add_argument("--certified", action="store_true")
    p.add_argument("--attach", metavar="PDF")

    p = sub.add_parser("open", help="Open a thread and show its latest message")
    p.add_argument("thread")

    sub.add_parser("inbox", help="List inbox entries")
    sub.add_parser("requests", help="List pending message requests")

    p = sub.add_parser("accept", help="Accept a message request")
    p.add_argument("request_id")
    p = sub.add_parser("block", help="Block the sender of a message request")
    p.add_argument("request_id")

    p = sub.add_parser("favorite", help="Save a recipient to favorites")
    p.add_argument("to")
    p = sub.add_parser("contact", help="Save a recipient to contacts")
    p.add_argument("to")

    sub.add_parser("lists", help="Show favorites, contacts and preset addresses")
    return parser.parse_args(argv)


def build_messenger(args) -> Messenger:
    password = args.password or os.environ.get("LITERANOVA_PASSWORD")
    signer = None
    if password:
        signer = LocalSigner(load_or_create_signer_key(password))
    repo = MessageRepository(PersistentStore(backend=args.backend))
    resolver = IdentifierResolver(default_endpoints(args.rpc))
    m = Messenger(repo, resolver, signer=signer)
    if signer is not None:
        m.connect()
    return m


def _attach(m: Messenger, path: str) -> bool:
    with open(path, "rb") as f:
        return m.attach(f, filename=path)


def _print_entries(title: str, entries) -> None:
    print(f"{title} ({len(entries)})")
    for e in entries:
        print(f"  {e.label:<24} {e.address}")


def run(args, m: Messenger) -> int:
    cmd = args.cmd
    if cmd == "whoami":
        print(m.state.account or "NOT CONNECTED")
        print("UNLOCKED" if m.is_unlocked() else "LOCKED")
        return 0
    if cmd == "unlock":
        ok = m.unlock()
        print(m.state.status)
        return 0 if ok else 1
    if cmd == "lock":
        m.lock()
        print(m.state.status)
        return 0
    if cmd == "resolve":
        target = m.handle_to_go(args.raw)
        print(m.state.status)
        return 0 if target is not None else 1

    if cmd in ("send", "reply"):
        if cmd == "send":
            if m.handle_to_go(args.to) is None:
                print(m.state.status)
                return 1
        elif m.open_thread(args.thread) is None:
            print(m.state.status)
            return 1
        if args.attach and not _attach(m, args.attach):
            print(m.state.status)
            return 1
        result = m.send(args.body, certified=args.certified)
        print(m.state.status)
        if result is not None:
            print(f"thread: {result.thread_id}")
        return 0 if result is not None else 1

    if cmd == "open":
        thread = m.open_thread(args.thread)
        print(m.state.status)
        return 0 if thread is not None else 1
    if cmd == "inbox":
        entries = m.inbox()
        if not entries:
            print(m.state.status)
        for e in entries:
            flag = " [CERTIFIED]" if e.certified else ""
            print(f"  {e.thread_id}  from {short_addr(e.sender)}{flag}")
        return 0
    if cmd == "requests":
        reqs = m.requests()
        if not reqs:
            print(m.state.status)
        for r in reqs:
            flag = " [CERTIFIED]" if r.certified else ""
            print(f"  {r.id}  thread {r.thread_id}  from {short_addr(r.sender)}{flag}")
        return 0
    if cmd in ("accept", "block"):
        ok = m.accept(args.request_id) if cmd == "accept" else m.block(args.request_id)
        print(m.state.status)
        return 0 if ok else 1
    if cmd in ("favorite", "contact"):
        if m.handle_to_go(args.to) is None:
            print(m.state.status)
            return 1
        ok = m.add_favorite() if cmd == "favorite" else m.add_contact()
        print(m.state.status)
        return 0 if ok else 1
    if cmd == "lists":
        _print_entries("FAVORITES", m.favorites())
        _print_entries("CONTACTS", m.contacts())
        print("PRESETS: " + ", ".join(m.preset_addresses()))
        return 0
    return 2


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(force=True)
    if not args.quiet:
        print_banner()
    try:
        m = build_messenger(args)
    except (OSError, ValueError) as exc:
        log.error("[main] signer unavailable: %s", exc)
        print(f"SIGNER ERROR: {exc}")
        return 1
    try:
        return run(args, m)
    except OSError as exc:
        print(f"FILE ERROR: {exc}")
        return 1
    finally:
        m.repo.store.close()


if __name__ == "__main__":
    sys.exit(main())
