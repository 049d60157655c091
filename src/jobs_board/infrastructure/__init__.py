"""Infrastructure — job store client, token stores, and index storage."""
