"""ClipForge - cut clips from online videos and publish them to short-form platforms"""
