"""Core domain modules.

- execution: order placement on the exchange (settled fills)
- plan: investment periods, plan state machine, scheduler, runner
- persistence: persistence boundary (interfaces)
- storage: SQL implementation of the persistence interfaces
"""
