"""Internal building blocks: transport, rate limits, pagination, retry, logging."""
