from ai.prompts.system_coach import SYSTEM_COACH
from ai.prompts.personas import CHILD_OVERLAY, TODDLER_OVERLAY, YOUTH_OVERLAY

__all__ = ["SYSTEM_COACH", "TODDLER_OVERLAY", "CHILD_OVERLAY", "YOUTH_OVERLAY"]
