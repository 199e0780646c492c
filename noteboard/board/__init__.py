"""Board logic: column layout, drag tracking, merge detection."""
