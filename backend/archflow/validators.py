from typing import List, Optional


class LayoutValidators:
    """Validation rules for layouts received over the API"""

    @staticmethod
    def validate_unique_room_ids(room_ids: List[str]) -> bool:
        """Room ids must be unique within a layout"""
        seen = set()
        duplicates = []
        for room_id in room_ids:
            if room_id in seen and room_id not in duplicates:
                duplicates.append(room_id)
            seen.add(room_id)
        if duplicates:
            raise ValueError(f"Duplicate room ids: {', '.join(duplicates)}")
        return True

    @staticmethod
    def validate_room_size_multiplier(multiplier: Optional[float]) -> bool:
        """Validate room size multiplier is reasonable"""
        if multiplier is None:
            return True
        if multiplier < 0.1 or multiplier > 10:
            raise ValueError("Room size multiplier must be between 0.1 and 10")
        return True
