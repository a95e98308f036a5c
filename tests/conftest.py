import pytest

from xorcrack import load_reference_fingerprint

ENGLISH_TEXT = (
    "It was late in the afternoon when the train finally pulled into the station, and most of the passengers "
    "had long since given up any hope of arriving in time for dinner. The conductor walked the length of the "
    "carriage twice, apologising to everyone he passed, though nobody seemed to blame him for the delay. Outside "
    "the window the fields were turning gold in the low sun, and a flock of starlings rose and fell over the "
    "hedges like smoke. A small boy near the front asked his mother whether they were nearly there, and she "
    "told him that they were, which was true for the first time that day. When the doors opened at last there "
    "was a rush of cold air and the smell of rain on hot stone, and the crowd spilled out onto the platform "
    "with the relief of people who have been sitting still for far too long. Somewhere a dog was barking, and "
    "a porter was whistling a song that had been popular many years ago. The station master checked his watch, "
    "shook his head, and went back inside to write up the day in his ledger. He had kept the ledger for thirty "
    "years, and in all that time he had never once missed an entry, not even on the morning of his wedding. "
    "There were worse things, he often said, than a train that arrived late. There were trains that never "
    "arrived at all, and people who waited for them anyway, and he had seen plenty of both.\n"
).encode()


@pytest.fixture(scope="session")
def reference():
    return load_reference_fingerprint()


@pytest.fixture
def english_text():
    return ENGLISH_TEXT
