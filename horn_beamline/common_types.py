from typing import Protocol, Sequence, Tuple

Vector3 = Tuple[float, float, float]
Point4 = Sequence[float]


class FieldLike(Protocol):
    def get_field_value(self, point: Point4) -> Vector3: ...
