from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class EventType(str, enum.Enum):
    """Tracked business events, in metric declaration order"""
    NRC = "NRC"
    NDC = "NDC"
    RDC = "RDC"
    CASINO_BET_PLACED = "Casino_Bet_Placed"
    SPORTSBOOK_BET_PLACED = "Sportsbook_Bet_Placed"
    PAGE_VIEW = "page_view"


class RunStatus(str, enum.Enum):
    """Monitoring run status"""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
