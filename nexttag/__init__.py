"Compute the next SemVer or CalVer release version from existing tags."
