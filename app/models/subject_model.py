from dataclasses import dataclass


@dataclass
class SubjectModel:
    """A student entry held by the StudentDirectory contract."""

    address: str
    name: str
    surname: str
    studies: str
    second_surname: str = ""
    active: bool = True
