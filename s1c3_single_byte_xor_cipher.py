#!/usr/bin/env python3
import argparse
from pathlib import Path
from typing import List, Optional

from xorcrack import DEFAULT_CORPUS_PATH, best_single_byte_key, hex_decode, load_reference_fingerprint

"""
Single-byte XOR cipher

The hex encoded string:

1b37373331363f78151b7f2b783431333d78397828372d363c78373e783a393b3736

... has been XOR'd against a single character. Find the key, decrypt the message.

You can do this by hand. But don't: write code to do it for you.

How? Devise some method for "scoring" a piece of English plaintext. Character frequency is a good metric.
Evaluate each output and choose the one with the best score.
"""

CIPHERTEXT = "1b37373331363f78151b7f2b783431333d78397828372d363c78373e783a393b3736"


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Break a hex-encoded single-byte XOR ciphertext")
    parser.add_argument("ciphertext", nargs="?", default=CIPHERTEXT, help="hex-encoded ciphertext")
    parser.add_argument("--corpus", type=Path, default=DEFAULT_CORPUS_PATH,
                        help="reference text used to build the frequency model")
    args = parser.parse_args(argv)

    try:
        ciphertext = hex_decode(args.ciphertext)
    except ValueError as e:
        parser.error(str(e))

    res = best_single_byte_key(ciphertext, load_reference_fingerprint(args.corpus))
    if res is None:
        print("No key gives a plausible plaintext")
        return
    print(f"Key: {res.key:#04x}")
    print(res.plaintext.decode())


if __name__ == "__main__":
    main()
