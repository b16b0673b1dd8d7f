from .errors import RevertError
from .chain import Chain, SystemClock
from .token import RewardToken, Event, TOKEN_UNIT
from .ledger import Rewards, PRECISION

__all__ = [
    'RevertError',
    'Chain',
    'SystemClock',
    'RewardToken',
    'Event',
    'TOKEN_UNIT',
    'Rewards',
    'PRECISION',
]
