# CACHE
ONE_MINUTE = 60


# PAGINATION: (default limit, max limit)
POSTS_PAGE = (10, 50)
COMMENTS_PAGE = (20, 50)
REPLIES_PAGE = (10, 50)
LIKES_PAGE = (20, 100)
FOLLOWS_PAGE = (20, 100)
NOTIFICATIONS_PAGE = (20, 100)
CONVERSATIONS_PAGE = (20, 100)
MESSAGES_PAGE = (50, 100)
SEARCH_POSTS_PAGE = (20, 50)
EXPLORE_PAGE = (20, 50)
SEARCH_USERS_LIMIT = (10, 50)
GLOBAL_SEARCH_LIMIT = (5, 20)

# FIELD LIMITS
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6
FULL_NAME_MIN_LENGTH = 2
FULL_NAME_MAX_LENGTH = 100
BIO_MAX_LENGTH = 150
CAPTION_MAX_LENGTH = 2200
LOCATION_MAX_LENGTH = 100
MAX_POST_IMAGES = 10
COMMENT_MAX_LENGTH = 500
MESSAGE_MAX_LENGTH = 1000

# UPLOADS
MAX_IMAGE_SIZE = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# EXPLORE
TRENDING_WINDOW_HOURS = 24
