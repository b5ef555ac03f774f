from app.models.user_profile import UserProfile
from app.models.feed_item import FeedItem, ActivityType, ACTIVITY_PRIORITY
from app.models.follow import FollowEdge, FollowRequest, FollowRequestStatus
from app.models.shared_item import SharedItem, ItemVote, VoteType
