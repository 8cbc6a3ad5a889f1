"""
NMEA-0183 style sentence validation and dispatch

Accepted grammar:

    $TAG,field1,field2,...*HH     HH = XOR of every character between '$' and '*'
    $TAG,field1,field2,...        some transducer firmware omits the checksum

Anything else on the line is serial noise and is ignored.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from errors import ChecksumMismatch, WindTellerError

SENTENCE_RE = re.compile(r'^\$([A-Z]+),(.*)\*([0-9A-F][0-9A-F])$')
SENTENCE_NO_CHECKSUM_RE = re.compile(r'^\$([A-Z]+),(.*)$')


@dataclass
class Sentence:
    tag: str
    fields: List[str] = field(default_factory=list)
    checksum_valid: bool = True
    has_checksum: bool = True


def nmea_checksum(body):
    """XOR of the ordinals of every character in ``body``"""
    checksum = 0
    for char in body:
        checksum ^= ord(char)
    return checksum


def format_sentence(tag, fields):
    """Build a checksummed sentence line, without terminator"""
    body = ",".join([tag] + [str(f) for f in fields])
    return f"${body}*{nmea_checksum(body):02X}"


def parse_sentence(line):
    """
    Parse one line (terminator already stripped)

    Returns:
        Sentence, or None when the line matches neither grammar

    Raises:
        ChecksumMismatch: the line carries a checksum that does not match
    """
    match = SENTENCE_RE.match(line)
    if match:
        expected = int(match.group(3), 16)
        actual = nmea_checksum(line[1:-3])
        if actual != expected:
            raise ChecksumMismatch(line, expected, actual)
        return Sentence(tag=match.group(1), fields=match.group(2).split(","))

    match = SENTENCE_NO_CHECKSUM_RE.match(line)
    if match:
        return Sentence(tag=match.group(1), fields=match.group(2).split(","),
                        checksum_valid=True, has_checksum=False)

    return None


class SentenceDispatcher:
    """Validates lines and routes sentences to the handler registered for their tag"""

    def __init__(self, debug=False):
        self.debug = debug
        self.handlers: Dict[str, Callable[[Sentence], None]] = {}
        self.logger = logging.getLogger(__name__)

        self.sentences = 0
        self.checksum_errors = 0
        self.ignored = 0
        self.decode_errors = 0

    def register(self, tag, handler):
        self.handlers[tag] = handler

    def dispatch(self, line) -> Optional[Sentence]:
        """
        Handle one line; never raises for bad input

        Returns the parsed sentence, or None when it was dropped.
        """
        try:
            sentence = parse_sentence(line)
        except ChecksumMismatch as e:
            self.checksum_errors += 1
            self.logger.error(f"{e}: {line!r}")
            return None

        if sentence is None:
            self.ignored += 1
            return None

        self.sentences += 1

        if self.debug:
            self.logger.debug(f"NMEA {sentence.tag} {','.join(sentence.fields)}")

        handler = self.handlers.get(sentence.tag)
        if handler is None:
            return sentence

        try:
            handler(sentence)
        except WindTellerError as e:
            self.decode_errors += 1
            self.logger.warning(f"Dropped {sentence.tag} sentence: {e}")
            return None

        return sentence
