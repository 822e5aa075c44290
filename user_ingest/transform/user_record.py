# ==============================================
# UserRecord (Data Class)
# ==============================================
#
# PURPOSE:
#   The persisted shape of one user, as committed to the `users`
#   table:
#     - id: int | None          → surrogate key, assigned by MySQL
#     - name: str               → "<firstName> <lastName>"
#     - age: int
#     - address: dict           → addressLine1, addressLine2, city, state
#     - additional_info: dict   → attribute column → raw string value
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class UserRecord:
    name: str
    age: int
    address: Dict[str, Optional[str]] = field(default_factory=dict)
    additional_info: Dict[str, str] = field(default_factory=dict)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "address": dict(self.address),
            "additional_info": dict(self.additional_info),
        }
