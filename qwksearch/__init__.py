"""QwkSearch: answer engine combining metasearch with streamed LLM answers."""

__version__ = "0.1.0"
