# Kafka topic and event names
TOPIC_FUNNEL_EVENTS = "funnel_events"
EVENT_ASSESSMENT_COMPLETED = "assessment_completed"
