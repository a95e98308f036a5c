#!/usr/bin/env python3
from xorcrack import hex2b64

"""
Convert hex to base64

The string:

49276d206b696c6c696e6720796f757220627261696e206c696b65206120706f69736f6e6f7573206d757368726f6f6d

Should produce:

SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t

Always operate on raw bytes, never on encoded strings. Only use hex and base64 for pretty-printing.
"""


def main():
    print(hex2b64("49276d206b696c6c696e6720796f757220627261696e206c696b65206120706f69736f6e6f7573206d757368726f6f6d"))


if __name__ == "__main__":
    main()
