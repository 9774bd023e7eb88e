from timeloop.main import main

raise SystemExit(main())
