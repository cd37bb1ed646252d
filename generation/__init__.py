"""
Blog generation pipeline: record store, agents, orchestrator, queue and worker.
"""
