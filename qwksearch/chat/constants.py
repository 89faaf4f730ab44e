"""Constants for chat services."""

DEFAULT_CHAT_TITLE = "New chat"
REPHRASE_OPTIMIZATION_MODES = ("balanced", "quality")
USER_HISTORY_ROLES = ("human", "user")
REPHRASE_NOT_NEEDED = "not_needed"
CHAT_FAILURE_MESSAGE = "An error occurred while processing chat request"
STREAM_FAILURE_MESSAGE = "An error occurred while generating the answer"
CHAT_DELETED_MESSAGE = "Chat deleted successfully"

WEB_SEARCH = "webSearch"
ACADEMIC_SEARCH = "academicSearch"
WRITING_ASSISTANT = "writingAssistant"
WOLFRAM_ALPHA_SEARCH = "wolframAlphaSearch"
YOUTUBE_SEARCH = "youtubeSearch"
REDDIT_SEARCH = "redditSearch"

__all__ = [
    "ACADEMIC_SEARCH",
    "CHAT_DELETED_MESSAGE",
    "CHAT_FAILURE_MESSAGE",
    "DEFAULT_CHAT_TITLE",
    "REDDIT_SEARCH",
    "REPHRASE_NOT_NEEDED",
    "REPHRASE_OPTIMIZATION_MODES",
    "STREAM_FAILURE_MESSAGE",
    "USER_HISTORY_ROLES",
    "WEB_SEARCH",
    "WOLFRAM_ALPHA_SEARCH",
    "WRITING_ASSISTANT",
    "YOUTUBE_SEARCH",
]
