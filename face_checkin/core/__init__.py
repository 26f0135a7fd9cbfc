"""Camera capture and the enroll / check-in workflow state machine."""
