"""
Offline-first payment synchronization.

Components:
- state_machine: legal sync_status transitions
- local_store: the only writer of Payment/PendingDeletion rows during a sync
- remote / session / mirror: external collaborators and their REST/null adapters
- upload / download: the two halves of a reconciliation pass
- groups: keeps legs of one bill consistent and sharing one mirror
- orchestrator: single-flight entry point (perform_sync)
- factory: builds an orchestrator from settings.PAGOS_SYNC
"""
