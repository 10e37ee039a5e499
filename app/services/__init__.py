"""
Service Organization
====================

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: SensorService, PumpTransitionService, MistingService, UserAuthManager

**container.py**
  Builds the repositories, realtime emitters, MQTT client and services once
  at startup and shuts them down in reverse order.
"""
