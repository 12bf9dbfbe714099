"""PEACH permit status sync - summarize PEACH process events into permit stage/state"""
