# Overview: Service layer; one module per concern, each taking (stores, session, ...).
