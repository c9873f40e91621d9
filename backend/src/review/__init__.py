"""Review workflow gating which records feed BI reporting."""
