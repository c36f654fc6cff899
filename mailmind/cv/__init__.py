"""Two-step CV funnel: keyword light detection, then gated full extraction."""
