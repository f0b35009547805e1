"""Domain modules: services, repositories and read schemas per feature.

Services own the business rules and return pydantic schemas; routers only
wire gates to services and wrap the results in the response envelope.
"""
