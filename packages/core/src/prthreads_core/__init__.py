"""Browse, reply to, and resolve GitHub pull-request review threads."""
