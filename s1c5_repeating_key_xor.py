#!/usr/bin/env python3
from xorcrack import hex_encode, repeating_key_xor

"""
Implement repeating-key XOR

Here is the opening stanza of an important work of the English language:

Burning 'em, if you ain't quick and nimble
I go crazy when I hear a cymbal

Encrypt it, under the key "ICE", using repeating-key XOR.

In repeating-key XOR, you'll sequentially apply each byte of the key; the first byte of plaintext will be XOR'd
against I, the next C, the next E, then I again for the 4th byte, and so on.
"""


def main():
    plaintext = b"Burning 'em, if you ain't quick and nimble\nI go crazy when I hear a cymbal"
    print(hex_encode(repeating_key_xor(plaintext, b"ICE")))


if __name__ == "__main__":
    main()
