"""Domain layer: session state machine, ledger, value objects and export serializer"""
