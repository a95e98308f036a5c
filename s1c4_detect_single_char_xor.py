#!/usr/bin/env python3
import argparse
from pathlib import Path
from typing import List, Optional

from xorcrack import DEFAULT_CORPUS_PATH, detect_single_byte_xor, hex_decode, load_reference_fingerprint

"""
Detect single-character XOR

One of the 60-character strings in this file has been encrypted by single-character XOR.

Find it.

(Your code from #3 should help.)
"""


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Find the line that was encrypted with single-byte XOR")
    parser.add_argument("path", type=Path, help="file of hex-encoded ciphertexts, one per line")
    parser.add_argument("--corpus", type=Path, default=DEFAULT_CORPUS_PATH,
                        help="reference text used to build the frequency model")
    args = parser.parse_args(argv)

    with open(args.path, "r") as f:
        try:
            ciphertexts = [hex_decode(line) for line in f if line.strip()]
        except ValueError as e:
            parser.error(str(e))

    res = detect_single_byte_xor(ciphertexts, load_reference_fingerprint(args.corpus))
    if res is None:
        print("No line gives a plausible plaintext")
        return
    print(f"Ciphertext: {res.ciphertext.hex()}")
    print(f"Key: {res.key:#04x}")
    print(res.plaintext)


if __name__ == "__main__":
    main()
