"""shipit: release orchestration for sbt projects."""

__version__ = "0.3.0"
