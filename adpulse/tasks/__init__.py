# Background tasks
