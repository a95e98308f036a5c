#!/usr/bin/env python3
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from xorcrack import (DEFAULT_CORPUS_PATH, DEFAULT_MAX_KEY_LENGTH, base64_decode, break_repeating_key_xor,
                      hex_decode, load_reference_fingerprint, rank_repeating_xor_key_lengths, repeating_key_xor)

logger = logging.getLogger(__name__)

"""
Break repeating-key XOR
It is officially on, now.

This challenge isn't conceptually hard, but it involves actual error-prone coding. The other challenges in this set are there to bring you up to speed. This one is there to qualify you. If you can do this one, you're probably just fine up to Set 6.

There's a file here. It's been base64'd after being encrypted with repeating-key XOR.

Decrypt it.

Here's how:

    Let KEYSIZE be the guessed length of the key; try values from 2 to (say) 40.
    Write a function to compute the edit distance/Hamming distance between two strings. The Hamming distance is just the number of differing bits. The distance between:

    this is a test

    and

    wokka wokka!!!

    is 37. Make sure your code agrees before you proceed.
    For each KEYSIZE, take the first KEYSIZE worth of bytes, and the second KEYSIZE worth of bytes, and find the edit distance between them. Normalize this result by dividing by KEYSIZE.
    The KEYSIZE with the smallest normalized edit distance is probably the key. You could proceed perhaps with the smallest 2-3 KEYSIZE values. Or take 4 KEYSIZE blocks instead of 2 and average the distances.
    Now that you probably know the KEYSIZE: break the ciphertext into blocks of KEYSIZE length.
    Now transpose the blocks: make a block that is the first byte of every block, and a block that is the second byte of every block, and so on.
    Solve each block as if it was single-character XOR. You already have code to do this.
    For each block, the single-byte XOR key that produces the best looking histogram is the repeating-key XOR key byte for that block. Put them together and you have the key.

This code is going to turn out to be surprisingly useful later on. Breaking repeating-key XOR ("Vigenere") statistically is obviously an academic exercise, a "Crypto 101" thing. But more people "know how" to break it than can actually break it, and a similar technique breaks something much more important.
No, that's not a mistake.

We get more tech support questions for this challenge than any of the other ones. We promise, there aren't any blatant errors in this text. In particular: the "wokka wokka!!!" edit distance really is 37.
"""


DECODERS = {
    "base64": base64_decode,
    "hex": hex_decode,
}


def read_ciphertext(path: Path, encoding: str) -> bytes:
    """
    Read a ciphertext file that is either raw bytes, or hex/base64 text
    """
    if encoding == "raw":
        with open(path, "rb") as f:
            return f.read()
    with open(path, "r") as f:
        return DECODERS[encoding](f.read())


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Break repeating-key XOR")
    parser.add_argument("path", type=Path, help="ciphertext file")
    parser.add_argument("--encoding", choices=["base64", "hex", "raw"], default="base64",
                        help="how the ciphertext file is encoded (default: %(default)s)")
    parser.add_argument("--corpus", type=Path, default=DEFAULT_CORPUS_PATH,
                        help="reference text used to build the frequency model")
    parser.add_argument("--min-key-length", type=int, default=1)
    parser.add_argument("--max-key-length", type=int, default=DEFAULT_MAX_KEY_LENGTH)
    parser.add_argument("--key-length", type=int, help="skip guessing and use this key length")
    parser.add_argument("--show-candidates", type=int, default=5, metavar="N",
                        help="print the N best key length guesses")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        ciphertext = read_ciphertext(args.path, args.encoding)
    except ValueError as e:
        parser.error(str(e))

    if args.min_key_length < 1 or args.max_key_length < args.min_key_length:
        parser.error("key length bounds must satisfy 1 <= --min-key-length <= --max-key-length")
    if args.key_length is not None and args.key_length < 1:
        parser.error("--key-length must be at least 1")

    logger.debug("Read %d bytes of ciphertext from %s", len(ciphertext), args.path)

    ranked = rank_repeating_xor_key_lengths(ciphertext, min_length=args.min_key_length,
                                            max_length=args.max_key_length)
    for candidate in ranked[:args.show_candidates]:
        print(f"Keysize {candidate.length}: {candidate.score:.4f}")

    key = break_repeating_key_xor(ciphertext, load_reference_fingerprint(args.corpus),
                                  key_length=args.key_length,
                                  min_key_length=args.min_key_length,
                                  max_key_length=args.max_key_length)
    if key is None:
        print("Could not recover a key")
        return

    print(f"Key: {key!r}")
    print(repeating_key_xor(ciphertext, key).decode(errors="replace"))


if __name__ == "__main__":
    main()
