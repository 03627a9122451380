from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Redactor:
    enabled: bool = True
    _id_map: dict[str, int] = field(default_factory=dict)
    _id_counter: int = 0

    def redact_ip(self, ip: str) -> str:
        if not self.enabled:
            return ip
        parts = ip.split(".")
        if len(parts) == 4 and all(part.isdigit() for part in parts):
            return f"x.x.x.{parts[3]}"
        return ip

    def redact_unique_id(self, unique_id: str) -> str:
        """Keep the vendor prefix, replace the device part with a stable counter."""
        if not self.enabled or len(unique_id) != 12:
            return unique_id
        counter = self._id_map.get(unique_id)
        if counter is None:
            self._id_counter += 1
            counter = self._id_counter
            self._id_map[unique_id] = counter
        return f"{unique_id[:6]}xxxx{counter:02d}"
