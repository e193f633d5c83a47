"""Technical infrastructure shared by the bounded contexts."""
