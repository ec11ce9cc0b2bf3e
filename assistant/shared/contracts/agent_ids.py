"""Identifiers of every agent known to the orchestrator."""

ANALYST = "analyst"
TASK_BREAKDOWN = "task-breakdown"
RESEARCH_PLANNER = "research-planner"
WEB_RESEARCHER = "web-researcher"
PRIORITIZER_SCHEDULER = "prioritizer-scheduler"
DECISION_SUPPORT = "decision-support"
FINAL_ASSEMBLER = "final-assembler"

# Enrichment pipeline
WEB_CONTENT = "web-content"
CONTENT_SUMMARIZER = "content-summarizer"
TASK_ANALYZER = "task-analyzer"
