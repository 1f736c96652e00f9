"""Animation runtime: the child process side of an animation session"""
