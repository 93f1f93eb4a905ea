"""Models package."""

from .user import User
from .subscription import Subscription
from .workspace import WorkSpace
from .member import Member
from .folder import Folder
from .video import Video
from .invite import Invite
from .notification import Notification
from .video_analytics import VideoAnalytics
from .call_to_action import CallToAction
