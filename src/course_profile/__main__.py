from course_profile.cli import main

main()
