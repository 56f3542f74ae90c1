from .reconciler import CalendarReconciler, SWEEP_POLICY, UNIT_SYNC_POLICY

__all__ = ['CalendarReconciler', 'SWEEP_POLICY', 'UNIT_SYNC_POLICY']
