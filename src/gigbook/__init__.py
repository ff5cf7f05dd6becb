"""gigbook: bookkeeping for freelance events."""
