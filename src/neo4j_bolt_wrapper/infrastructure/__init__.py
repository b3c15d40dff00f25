"""Infrastructure implementations of domain interfaces."""

from .neo4j_driver import Neo4jBoltDriver, to_neo4j_auth

__all__ = ["Neo4jBoltDriver", "to_neo4j_auth"]
