"""Core data structures: obstacles, nodes, spatial index, paths and the planner base class."""
