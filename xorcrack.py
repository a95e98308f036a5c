import base64
import binascii
import logging
import math
from collections import Counter
from dataclasses import dataclass
from itertools import cycle
from pathlib import Path
from typing import Generator, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CORPUS_PATH = Path(__file__).resolve().parent / "data" / "corpus.txt"
DEFAULT_MAX_KEY_LENGTH = 40

# Fingerprints cover code points 0-255
FINGERPRINT_SIZE = 256


class DecodeError(ValueError):
    pass


def _preview(text: str, limit: int = 32) -> str:
    """
    Shorten text for error messages

    >>> _preview("0123456789", limit=4)
    '0123... (10 chars)'
    """
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text)} chars)"


def hex_decode(text: str) -> bytes:
    """
    Decode a hex string to bytes. Surrounding whitespace is ignored

    >>> hex_decode("49276d\\n")
    b"I'm"
    >>> hex_decode("abc")
    Traceback (most recent call last):
    xorcrack.DecodeError: Bad hex input 'abc'
    >>> hex_decode("zz")
    Traceback (most recent call last):
    xorcrack.DecodeError: Bad hex input 'zz'
    """
    text = text.strip()
    try:
        return binascii.unhexlify(text)
    except ValueError as e:
        raise DecodeError(f"Bad hex input {_preview(text)!r}") from e


def hex_encode(data: bytes) -> str:
    return data.hex()


def base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode()


def base64_decode(text: str) -> bytes:
    """
    Decode base64 text to bytes. Line breaks and other whitespace are ignored

    >>> base64_decode("SSdt\\nIGtp")
    b"I'm ki"
    >>> base64_decode("SSd!")
    Traceback (most recent call last):
    xorcrack.DecodeError: Bad base64 input 'SSd!'
    """
    text = "".join(text.split())
    try:
        return base64.b64decode(text, validate=True)
    except ValueError as e:
        raise DecodeError(f"Bad base64 input {_preview(text)!r}") from e


def hex2b64(hex: str) -> str:
    """
    Decodes hex to bytes and returns a base64 representation of those bytes

    >>> hex2b64('49276d206b696c6c696e6720796f757220627261696e206c696b65206120706f69736f6e6f7573206d757368726f6f6d')
    'SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t'
    """
    return base64_encode(hex_decode(hex))


def fixed_xor(b1: bytes, b2: bytes) -> bytes:
    """
    Take two bytes arguments of equal length, return their XOR

    >>> arg1 = hex_decode('1c0111001f010100061a024b53535009181c')
    >>> arg2 = hex_decode('686974207468652062756c6c277320657965')
    >>> fixed_xor(arg1, arg2).hex()
    '746865206b696420646f6e277420706c6179'

    >>> fixed_xor(b"AAAA", b"AAA")
    Traceback (most recent call last):
    ValueError: Arguments are of different length
    """
    if len(b1) != len(b2):
        raise ValueError("Arguments are of different length")
    return bytes(a ^ b for a, b in zip(b1, b2))


def repeating_key_xor(data: bytes, key: bytes) -> bytes:
    """
    Cycle the key and XOR data with it. Applying it twice with the same key gives back the data

    >>> plaintext = b"Burning 'em, if you ain't quick and nimble\\nI go crazy when I hear a cymbal"
    >>> repeating_key_xor(plaintext, b"ICE").hex()
    '0b3637272a2b2e63622c2e69692a23693a2a3c6324202d623d63343c2a26226324272765272a282b2f20430a652e2c652a3124333a653e2b2027630c692b20283165286326302e27282f'

    >>> repeating_key_xor(b"data", b"")
    Traceback (most recent call last):
    ValueError: Key must be non-zero length
    """
    if not key:
        raise ValueError("Key must be non-zero length")
    return bytes(a ^ b for a, b in zip(data, cycle(key)))


def single_byte_xor(data: bytes, key: int) -> bytes:
    return repeating_key_xor(data, bytes([key]))


@dataclass(frozen=True)
class Fingerprint:
    """
    Relative frequencies of the code points 0-255 in a text, scaled to unit magnitude.

    Reference corpora and candidate plaintexts are fingerprinted the same way so that they can be
    compared with similarity(). Text with nothing to count gives the all-zero fingerprint.
    """
    weights: Tuple[float, ...]

    @classmethod
    def from_text(cls, text: str) -> "Fingerprint":
        """
        >>> Fingerprint.from_text("aab").weights[ord("a")] > Fingerprint.from_text("aab").weights[ord("b")]
        True
        >>> Fingerprint.from_text("").magnitude
        0.0
        """
        counts = Counter(ord(c) for c in text)
        total = len(text)
        weights = [0.0] * FINGERPRINT_SIZE
        if total:
            for code_point, count in counts.items():
                if code_point < FINGERPRINT_SIZE:
                    weights[code_point] = count / total
        magnitude = math.sqrt(sum(w * w for w in weights))
        if magnitude:
            weights = [w / magnitude for w in weights]
        return cls(tuple(weights))

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.dot(self))

    def dot(self, other: "Fingerprint") -> float:
        return sum(a * b for a, b in zip(self.weights, other.weights))


def similarity(a: Fingerprint, b: Fingerprint) -> float:
    """
    Cosine similarity of two fingerprints. 1.0 means identical distributions, 0.0 means nothing in common.
    Zero fingerprints are similar to nothing

    >>> fp = Fingerprint.from_text("something big")
    >>> round(similarity(fp, fp), 9)
    1.0
    >>> similarity(fp, Fingerprint.from_text(""))
    0.0
    >>> similarity(Fingerprint.from_text("something bigger"), fp) > similarity(Fingerprint.from_text("at alll"), fp)
    True
    """
    magnitudes = a.magnitude * b.magnitude
    if magnitudes == 0:
        return 0.0
    return a.dot(b) / magnitudes


def load_reference_fingerprint(path: Path = DEFAULT_CORPUS_PATH) -> Fingerprint:
    """
    Build the reference fingerprint from a UTF-8 text corpus
    """
    with open(path, "r", encoding="utf-8") as f:
        corpus = f.read()
    if not corpus:
        logger.warning("Reference corpus %s is empty, every candidate will score 0", path)
    return Fingerprint.from_text(corpus)


@dataclass
class SingleByteCandidate:
    plaintext: bytes
    ciphertext: bytes
    key: int
    score: float

    def __repr__(self):
        return f"SingleByteCandidate(plaintext={self.plaintext}, ciphertext={self.ciphertext}, key={self.key:#04x}, score={self.score:.4f})"


def score_single_byte_keys(ciphertext: bytes, reference: Fingerprint) -> List[SingleByteCandidate]:
    """
    Decrypt ciphertext with every single-byte key and score each plaintext against the reference fingerprint

    Keys that do not decrypt to valid UTF-8 are dropped. Candidates are sorted best first
    """
    candidates: List[SingleByteCandidate] = []

    for k in range(256):
        plaintext = single_byte_xor(ciphertext, k)
        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError:
            continue
        candidates.append(SingleByteCandidate(plaintext=plaintext,
                                              ciphertext=ciphertext,
                                              key=k,
                                              score=similarity(reference, Fingerprint.from_text(text))))

    return sorted(candidates, key=lambda x: x.score, reverse=True)


def best_single_byte_key(ciphertext: bytes, reference: Fingerprint) -> Optional[SingleByteCandidate]:
    """
    Return the best-scoring single-byte XOR decryption of ciphertext, or None if there is nothing to go on
    (empty ciphertext, or no key gives valid text)

    >>> best_single_byte_key(b"", Fingerprint.from_text("etaoin shrdlu"))
    >>> best_single_byte_key(bytes([0x80, 0x80]), Fingerprint.from_text("etaoin shrdlu")) is not None
    True
    """
    if not ciphertext:
        return None
    candidates = score_single_byte_keys(ciphertext, reference)
    if not candidates:
        return None
    return candidates[0]


def detect_single_byte_xor(ciphertexts: Iterable[bytes], reference: Fingerprint) -> Optional[SingleByteCandidate]:
    """
    Given a haystack of ciphertexts, return the best single-byte XOR decryption found among all of them
    """
    best: Optional[SingleByteCandidate] = None
    for ciphertext in ciphertexts:
        candidate = best_single_byte_key(ciphertext, reference)
        if candidate is not None and (best is None or candidate.score > best.score):
            best = candidate
    return best


def bitwise_hamming_distance(b1: bytes, b2: bytes) -> int:
    """
    Return the number of bits that must be changed in b1 to get b2. Every byte by which the lengths
    differ counts as one more

    >>> bitwise_hamming_distance(b"HELLO", b"JELLO")
    1
    >>> bitwise_hamming_distance(b"AAAAA", b"JJJJA")
    12
    >>> bitwise_hamming_distance(b"this is a test", b"wokka wokka!!!")
    37
    >>> bitwise_hamming_distance(b"AAAA", b"AAA")
    1
    >>> bitwise_hamming_distance(b"", b"JJ")
    2
    """
    res = abs(len(b1) - len(b2))
    for a, b in zip(b1, b2):
        res += bin(a ^ b).count("1")
    return res


def chunkify(b: bytes, chunk_size: int) -> Generator[bytes, None, None]:
    """
    Yield chunk_size sized chunks from b

    >>> list(chunkify(b"ABCD", 2))
    [b'AB', b'CD']

    >>> list(chunkify(b"ABCDE", 2))
    [b'AB', b'CD', b'E']
    """
    for i in range(0, len(b), chunk_size):
        yield b[i:i + chunk_size]


@dataclass(frozen=True)
class KeyLengthCandidate:
    length: int
    score: float


def rank_repeating_xor_key_lengths(ciphertext: bytes,
                                   min_length: int = 1,
                                   max_length: int = DEFAULT_MAX_KEY_LENGTH) -> List[KeyLengthCandidate]:
    """
    Rank key lengths for a repeating-key XOR ciphertext, most likely first

    For each length, the ciphertext is cut into full chunks of that length and the Hamming distance of every
    adjacent pair of chunks is normalized by the length and averaged. Lengths that don't give at least two full
    chunks are skipped

    >>> [c.length for c in rank_repeating_xor_key_lengths(b"ABCDE", max_length=5)]
    [2, 1]
    >>> rank_repeating_xor_key_lengths(b"")
    []
    """
    if min_length < 1:
        raise ValueError("min_length must be at least 1")
    if max_length < min_length:
        raise ValueError("max_length must not be less than min_length")

    candidates: List[KeyLengthCandidate] = []

    for chunk_size in range(min_length, max_length + 1):
        num_chunks = len(ciphertext) // chunk_size
        if num_chunks < 2:
            break
        # Drop the last chunk if it's incomplete
        chunks = list(chunkify(ciphertext[:num_chunks * chunk_size], chunk_size))
        distances = [bitwise_hamming_distance(a, b) / chunk_size for a, b in zip(chunks, chunks[1:])]
        candidates.append(KeyLengthCandidate(length=chunk_size, score=sum(distances) / len(distances)))

    candidates.sort(key=lambda x: x.score)
    logger.debug("Key length ranking: %s", [(c.length, round(c.score, 3)) for c in candidates[:5]])
    return candidates


def guess_repeating_xor_key_length(ciphertext: bytes,
                                   min_length: int = 1,
                                   max_length: int = DEFAULT_MAX_KEY_LENGTH,
                                   num_candidates: int = 3) -> Optional[int]:
    """
    Guess the key length of a repeating-key XOR ciphertext

    Multiples of the true key length score about as well as the key length itself, so out of the best
    num_candidates lengths, take the smallest one if all the others are multiples of it. Otherwise trust the
    best-ranked length
    """
    if num_candidates < 1:
        raise ValueError("num_candidates must be at least 1")
    ranked = rank_repeating_xor_key_lengths(ciphertext, min_length=min_length, max_length=max_length)
    if not ranked:
        return None

    best = [c.length for c in ranked[:num_candidates]]
    keysize = min(best)
    if all(length % keysize == 0 for length in best):
        return keysize
    return best[0]


def transpose(b: bytes, key_length: int) -> List[bytes]:
    """
    Group bytes by their position modulo key_length, so that each group was encrypted with the same key byte

    >>> transpose(b"ABCDEFG", 3)
    [b'ADG', b'BE', b'CF']
    """
    if key_length < 1:
        raise ValueError("key_length must be at least 1")
    return [b[i::key_length] for i in range(key_length)]


def crack_repeating_key_xor(ciphertext: bytes,
                            key_length: int,
                            reference: Fingerprint,
                            filler: Optional[int] = None) -> Optional[bytes]:
    """
    Recover a repeating XOR key of known length, one byte per transposed column

    If some column gives no candidate, use filler as its key byte, or give up and return None when no filler
    is given
    """
    key: List[int] = []

    for i, column in enumerate(transpose(ciphertext, key_length)):
        candidate = best_single_byte_key(column, reference)
        if candidate is None:
            logger.debug("No key byte candidate for column %d of %d", i, key_length)
            if filler is None:
                return None
            key.append(filler)
            continue
        logger.debug("Column %d: key byte %#04x (score %.4f)", i, candidate.key, candidate.score)
        key.append(candidate.key)

    return bytes(key)


def break_repeating_key_xor(ciphertext: bytes,
                            reference: Fingerprint,
                            key_length: Optional[int] = None,
                            min_key_length: int = 1,
                            max_key_length: int = DEFAULT_MAX_KEY_LENGTH) -> Optional[bytes]:
    """
    Return the best-guess key for a ciphertext which has been encrypted using repeating key XOR

    @param ciphertext: The encrypted ciphertext
    @param reference: Fingerprint of the language the plaintext is expected to be in
    @param key_length: (Optional) the key length, if known. If unknown, inter-chunk hamming distance will be used to derive it
    """
    if key_length is None:
        key_length = guess_repeating_xor_key_length(ciphertext, min_length=min_key_length, max_length=max_key_length)
        if key_length is None:
            logger.debug("Ciphertext of %d bytes is too short to guess a key length", len(ciphertext))
            return None
        logger.debug("Guessed key length %d", key_length)

    return crack_repeating_key_xor(ciphertext, key_length, reference)
