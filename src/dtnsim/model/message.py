"""Message identity: the (source, destination, sequence) triple a node carries."""

from __future__ import annotations

from dataclasses import dataclass

DELIMITER = "-"


@dataclass(frozen=True, order=True)
class Message:
    """A message instance identified by source node, destination node, and sequence number.

    Messages carry no payload; only the identity travels between nodes. Two
    messages with the same triple are the same message.
    """

    source: int
    destination: int
    sequence: int

    def __post_init__(self) -> None:
        for name in ("source", "destination", "sequence"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Message {name} must be an integer, got {value!r}")
            # A negative number would put the delimiter inside the field
            if value < 0:
                raise ValueError(f"Message {name} must be non-negative, got {value}")

    def encode(self) -> str:
        """Flat trace encoding, e.g. ``"1-2-7"``."""
        return DELIMITER.join(str(v) for v in (self.source, self.destination, self.sequence))

    @classmethod
    def decode(cls, text: str) -> Message:
        """Parse the flat encoding produced by :meth:`encode`.

        Raises:
            ValueError: If the text is not three delimited non-negative integers.
        """
        fields = text.split(DELIMITER)
        if len(fields) != 3 or not all(f.isdigit() for f in fields):
            raise ValueError(f"Malformed message identity: {text!r}")
        source, destination, sequence = (int(f) for f in fields)
        return cls(source=source, destination=destination, sequence=sequence)

    def __str__(self) -> str:
        return self.encode()
