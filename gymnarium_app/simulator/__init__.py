"""Simulation core: component contracts, driver, exit predicates, persistence, visualisation.

Concrete environments and agents live in `gymnarium_app.environments` and
`gymnarium_app.agents`.
"""
