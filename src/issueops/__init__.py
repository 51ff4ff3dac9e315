"""issueops: chat-driven operations on versioned domain state.

Actions extracted from issue text are validated against a domain's action
schema, reduced by a pure domain reducer and persisted as a new state blob
plus one line in the domain's append-only action log.
"""

__version__ = "0.1.0"
