"""Mock responses for Twitter API v1.1 integration tests."""

from __future__ import annotations

VERIFY_CREDENTIALS_RESPONSE = {
    "id": 2244994945,
    "id_str": "2244994945",
    "name": "Twitter Dev",
    "screen_name": "TwitterDev",
    "location": "Internet",
    "description": "Your official source for Twitter Platform news, updates & events.",
    "url": "https://t.co/3ZX3TNiZCY",
    "entities": {
        "url": {
            "urls": [
                {
                    "url": "https://t.co/3ZX3TNiZCY",
                    "expanded_url": "https://developer.twitter.com",
                    "display_url": "developer.twitter.com",
                    "indices": [0, 23],
                }
            ]
        },
        "description": {"urls": []},
    },
    "protected": False,
    "followers_count": 513962,
    "friends_count": 2039,
    "created_at": "Sat Dec 14 04:35:55 +0000 2013",
    "statuses_count": 3635,
}

STATUS_UPDATE_RESPONSE = {
    "id": 42,
    "id_str": "42",
    "created_at": "Mon Oct 19 06:00:00 +0000 2026",
    "text": "hello",
    "source": "microtweet",
    "in_reply_to_status_id": None,
    "in_reply_to_user_id": None,
    "in_reply_to_screen_name": None,
    "user": {"id": 2244994945, "screen_name": "TwitterDev"},
    "retweet_count": 0,
    "favorite_count": 0,
}

HOME_TIMELINE_RESPONSE = [
    {
        "id": 1050118621198921728,
        "created_at": "Wed Oct 10 20:19:24 +0000 2018",
        "text": "To make room for more expression, we will now count all emojis as equal.",
        "user": {"id": 6253282, "screen_name": "TwitterAPI"},
        "retweet_count": 161,
        "favorite_count": 296,
    },
    {
        "id": 1050118621198921700,
        "created_at": "Wed Oct 10 20:10:11 +0000 2018",
        "text": "Replying to the announcement",
        "in_reply_to_status_id": 1050118621198921600,
        "in_reply_to_screen_name": "TwitterAPI",
        "user": {"id": 2244994945, "screen_name": "TwitterDev"},
    },
]

USER_NOT_FOUND_RESPONSE = '{"errors":[{"code":50,"message":"User not found."}]}'

RATE_LIMIT_ERROR_RESPONSE = '{"errors":[{"message":"Rate limit exceeded","code":88}]}'
