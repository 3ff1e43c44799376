from compliance_coach.main import main

main()
