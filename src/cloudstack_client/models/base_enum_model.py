from enum import Enum


class BaseEnumModel(Enum):
    @classmethod
    def from_dict(cls, value):
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(member.value).lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Cannot create {cls.__name__} from {value!r}")

    def to_dict(self):
        return self.value

    def __str__(self):
        return str(self.value)

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.name}"
