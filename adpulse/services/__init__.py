# Services - Meta client, analytics, sync pipeline
