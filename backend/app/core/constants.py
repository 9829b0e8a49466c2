"""
Centralized constants for venue search, chatter and realtime (Encapsulate What Changes).

Change limits or names here instead of scattering literals across services and routes.
"""

# Yelp search: bars only, 20 miles around the location, nearest first
SEARCH_CATEGORIES = "bars,sportsbars"
SEARCH_RADIUS_METERS = 32187
SEARCH_SORT_BY = "distance"
SEARCH_PAGE_SIZE = 20
# One extra result is requested as a lookahead: if it comes back, there is another page
SEARCH_LOOKAHEAD_LIMIT = SEARCH_PAGE_SIZE + 1

# Chatter: tweet-sized, short-lived
CHATTER_MAX_LENGTH = 140
CHATTER_LIST_LIMIT = 100
CHATTER_TTL_SECONDS = 24 * 60 * 60

# Realtime event types (sent as "type" on the websocket)
EVENT_ATTENDANT_ADDED = "attendant-added"
EVENT_ATTENDANT_REMOVED = "attendant-removed"
EVENT_CHATTER_POSTED = "chatter-posted"
EVENT_SUBSCRIBED = "subscribed"

# Per-subscriber backlog; a slow viewer drops events past this (presence is soft state)
SUBSCRIBER_QUEUE_SIZE = 256

# Scheduler job IDs (must match ids used in main.py add_job)
CHATTER_PURGE_JOB_ID = "chatter_purge"
