from app.schemas.user_profile import UserProfile, UserProfileUpdate
from app.schemas.feed_item import (
    ProductSnapshot, ProductImage, ProductPrice, ShopRef,
    IngestRequest, IngestResult, FeedItem, FeedPage, FriendCard
)
from app.schemas.follow import (
    FollowDecision, FollowRequestCreate, FollowRequest,
    FollowEntry, FollowListResponse, ReconcileResult
)
from app.schemas.shared_item import (
    ShareCreate, ShareFromFeed, SharedItem, VoteCreate,
    VoteTally, VoteResult, SharedItemView, SharedItemsPage
)
