"""Command line entry point: ``python -m gpt2tok``."""

import argparse
import logging
import sys

from ._sanitise import render_tokens
from ._settings import DEFAULT_MAX_LEN
from .errors import Gpt2TokError
from .factory import from_pretrained
from .strategy import list_strategies

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gpt2tok", description="Tokenize text with a GPT2 byte-level BPE model."
    )
    parser.add_argument("text", help="text to encode")
    parser.add_argument("--vocab", required=True, help="path to vocab.json")
    parser.add_argument("--merges", required=True, help="path to merges.txt")
    parser.add_argument("--max-len", type=int, default=DEFAULT_MAX_LEN)
    parser.add_argument("--lower-case", action="store_true")
    parser.add_argument("--pair", default=None, help="optional second sequence")
    parser.add_argument(
        "--strategy", default="longest-first", choices=list_strategies()
    )
    parser.add_argument("--stride", type=int, default=0)
    parser.add_argument(
        "--decode", action="store_true", help="also print the decoded text"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        tokenizer = from_pretrained(args.vocab, args.merges, lower_case=args.lower_case)
        encoded = tokenizer.encode(
            args.text, args.pair, args.max_len, args.strategy, args.stride
        )
    except Gpt2TokError as e:
        log.error(str(e))
        return 1

    tokens = tokenizer.decode_to_vec(encoded.token_ids)
    print(f"ids: {encoded.token_ids}")
    print(f"tokens: {render_tokens(tokens)}")
    if encoded.num_truncated_tokens:
        print(f"truncated: {encoded.num_truncated_tokens}")
        print(f"overflow: {encoded.overflowing_tokens}")
    if args.decode:
        print(f"decoded: {tokenizer.decode(encoded.token_ids)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
